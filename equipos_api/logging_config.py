import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "equipos_api"


def setup_logging(settings):
    """Configura el logger del paquete: consola siempre, archivos rotativos si hay LOG_DIR."""
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())
    # create_app puede llamarse varias veces en el mismo proceso (tests)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.log_dir:
        os.makedirs(settings.log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            os.path.join(settings.log_dir, 'app.log'),
            maxBytes=10485760,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        logger.addHandler(file_handler)

        error_handler = RotatingFileHandler(
            os.path.join(settings.log_dir, 'errors.log'),
            maxBytes=10485760,
            backupCount=10
        )
        error_handler.setFormatter(formatter)
        error_handler.setLevel(logging.ERROR)
        logger.addHandler(error_handler)

    logger.propagate = False
    return logger
