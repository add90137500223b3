"""
Configuration file for the application
"""

import os
import sys

import yaml

# Application configuration
APP_NAME = "sales_commission_api"
APP_VERSION = "0.1.0"

# Closing period status
PERIOD_STATUS_DRAFT = "draft"
PERIOD_STATUS_CLOSED = "closed"

# Sales without an owner are grouped under this key
UNASSIGNED_SALESPERSON = "Unassigned"

CONFIG_PATH_ENV = "COMMISSION_CONFIG"
CONFIG_ENV_ENV = "COMMISSION_ENV"


def load_config():
    """加载配置文件，优先使用外部配置"""
    explicit_path = os.getenv(CONFIG_PATH_ENV)
    if explicit_path:
        config_path = explicit_path
    else:
        # 优先从exe文件所在目录查找配置文件
        exe_dir = os.path.dirname(os.path.abspath(sys.executable if getattr(sys, 'frozen', False) else __file__))
        external_config_path = os.path.join(exe_dir, 'app', 'config', 'config.yml')

        if os.path.exists(external_config_path):
            config_path = external_config_path
        else:
            config_path = os.path.join(os.path.dirname(__file__), 'config', 'config.yml')

    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


config = load_config()

current_env = os.getenv(CONFIG_ENV_ENV) or config['current_env']
env_config = config['environments'][current_env]

db_config = env_config['database']
security_config = env_config.get('security', {})
logging_config = env_config.get('logging', {})
