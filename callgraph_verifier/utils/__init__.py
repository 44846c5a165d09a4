from .logger import logger, get_logger, set_log_level
from .visualize import export_to_dot, save_dot

__all__ = [
    # logger
    "logger",
    "get_logger",
    "set_log_level",
    # visualize
    "export_to_dot",
    "save_dot",
]
