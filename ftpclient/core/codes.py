class StatusCode:
    """Clase estática con los códigos de respuesta FTP (RFC 959) que usa el cliente"""

    # =========================
    # Preliminary (1xx)
    # =========================
    DATA_CONNECTION_ALREADY_OPEN = 125
    FILE_STATUS_OK = 150

    # =========================
    # Completion (2xx)
    # =========================
    COMMAND_OKAY = 200
    SYSTEM_STATUS = 211
    DIRECTORY_STATUS = 212
    FILE_STATUS = 213
    SYSTEM_TYPE = 215
    SERVICE_READY_FOR_NEW_USER = 220
    CONNECTION_CLOSING = 221
    DATA_CONNECTION_OPEN = 225
    CLOSING_DATA_CONNECTION = 226
    ENTERING_PASSIVE_MODE = 227
    ENTERING_EXTENDED_PASSIVE_MODE = 229
    USER_LOGGED_IN = 230
    AUTH_OKAY = 234
    ACTION_OK = 250
    PATH_CREATED = 257

    # =========================
    # Intermediate (3xx)
    # =========================
    USER_NAME_OK = 331
    ACTION_PENDING = 350

    # =========================
    # Errors (4xx / 5xx)
    # =========================
    NOT_LOGGED_IN = 530


# Respuestas válidas para un comando de transferencia antes de abrir la conexión de datos
TRANSFER_STARTING = (StatusCode.DATA_CONNECTION_ALREADY_OPEN, StatusCode.FILE_STATUS_OK)

# Respuesta final consumida al cerrar la conexión de datos
TRANSFER_COMPLETE = (StatusCode.CLOSING_DATA_CONNECTION, StatusCode.DATA_CONNECTION_OPEN)
