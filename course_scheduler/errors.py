# course_scheduler/errors.py


class InvalidParameterError(ValueError):
    """
    Parámetro de llamada inválido (umbral negativo, modo desconocido...).
    Los datos de horarios mal formados nunca levantan esta excepción.
    """
