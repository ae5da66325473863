class AppError(Exception):
    """
    Базовая ошибка приложения.
    status_code используется обработчиком исключений при формировании ответа.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(AppError):
    status_code = 404


class InvalidRequest(AppError):
    status_code = 400


class InvalidIdentifier(InvalidRequest):
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class Conflict(AppError):
    status_code = 409


class PersistenceError(AppError):
    status_code = 500


def error_message(exc: Exception) -> str:
    """Текст ошибки для журнала: сообщение AppError или общее 'Server error'."""
    if isinstance(exc, AppError):
        return exc.message
    return "Server error"
