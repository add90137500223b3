# app/utils/logger.py
import logging
from logging.handlers import TimedRotatingFileHandler
import os

from app.config import logging_config


def setup_logger(name: str, log_file: str, level=logging.INFO):
    """
    创建一个日志记录器，每天自动备份日志文件

    Args:
        name: 日志记录器名称
        log_file: 日志文件路径
        level: 日志级别

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 避免重复添加处理器
    if not logger.handlers:
        file_handler = TimedRotatingFileHandler(
            log_file,
            when="midnight",
            interval=1,
            backupCount=30,  # 保留30天的日志
            encoding='utf-8'
        )
        file_handler.setLevel(level)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

    return logger


app_logger = setup_logger(
    "commission",
    logging_config.get("file", "logs/app.log"),
    logging.getLevelName(str(logging_config.get("level", "INFO")).upper())
)
