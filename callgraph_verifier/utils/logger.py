import logging
import functools
import time

# Define Log Levels
DEBUG = logging.DEBUG
INFO = logging.INFO
WARNING = logging.WARNING
ERROR = logging.ERROR

LOG_FORMAT = (
    "%(asctime)s - [%(levelname)s] - %(name)s - [%(filename)s:%(lineno)d] - %(message)s"
)


# Singleton logger setup
def get_logger(name="CallGraphVerifier"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


logger = get_logger()


def set_log_level(level):
    logger.setLevel(level)


def log_walk(func):
    """Aspect: Log a full statement tree walk."""

    @functools.wraps(func)
    def wrapper(self, tree, *args, **kwargs):
        logger.debug(f"Walking statement tree rooted at {type(tree).__name__}...")
        start_time = time.time()

        call_graph = func(self, tree, *args, **kwargs)

        duration = (time.time() - start_time) * 1000
        edge_count = sum(len(callees) for callees in call_graph.values())
        logger.info(
            f"Call graph recovered in {duration:.2f}ms. "
            f"Callers: {len(call_graph)}, edges: {edge_count}"
        )
        return call_graph

    return wrapper


def log_verdict(func):
    """Aspect: Log the verdict of a call graph comparison."""

    @functools.wraps(func)
    def wrapper(result, expected, *args, **kwargs):
        verdict = func(result, expected, *args, **kwargs)
        if verdict:
            logger.debug(f"Call graphs match ({len(expected)} callers)")
        else:
            # 失败时必须输出完整诊断信息
            logger.error(verdict.message)
        return verdict

    return wrapper
