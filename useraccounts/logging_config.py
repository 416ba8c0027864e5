"""
Logging setup shared by the API process and the CLI entry point.
"""
import logging
import logging.config

def build_logging_config(log_level_int: int) -> dict:
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s'
            },
        },
        'handlers': {
            'console': {
                'level': log_level_int,
                'formatter': 'standard',
                'class': 'logging.StreamHandler',
                'stream': 'ext://sys.stdout',
            },
        },
        'loggers': {
            '': {
                'handlers': ['console'],
                'level': log_level_int,
                'propagate': False
            },
            'uvicorn.error': {
                'level': log_level_int,
                'handlers': ['console'],
                'propagate': False,
            },
            'uvicorn.access': {
                'handlers': ['console'],
                'level': logging.WARNING,
                'propagate': False,
            },
            'sqlalchemy.engine': {
                'handlers': ['console'],
                'level': logging.WARNING,
                'propagate': False,
            },
        }
    }

def configure_logging(log_level: str) -> str:
    """Apply the dictConfig for the given level name and return the level actually used."""
    log_level_str = log_level.upper()
    log_level_int = getattr(logging, log_level_str, None)
    if not isinstance(log_level_int, int):
        print(f"Warning: Invalid LOG_LEVEL '{log_level}'. Defaulting to INFO.")
        log_level_int = logging.INFO
        log_level_str = "INFO"

    try:
        logging.config.dictConfig(build_logging_config(log_level_int))
        logging.getLogger(__name__).info(f"Logging configured successfully. Application log level set to: {log_level_str}")
    except Exception as e:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        logging.getLogger(__name__).error(f"Error configuring logging with dictConfig: {e}. Using basicConfig.", exc_info=True)
        log_level_str = "INFO"
    return log_level_str
