import os
from typing import Any, Dict, Optional

import yaml
from jinja2 import Template
from loguru import logger

from loopcoder.lctypes import LoopCoderArgs
from loopcoder.utils.printer_utils import Printer


printer = Printer()

CONFIG_DIR_NAME = ".loopcoder"
CONFIG_FILE_NAME = "config.yml"
ENV_PREFIX = "LOOPCODER_"


def convert_yaml_config_to_str(yaml_config):
    yaml_content = yaml.safe_dump(
        yaml_config,
        allow_unicode=True,
        default_flow_style=False,
        default_style=None,
    )
    return yaml_content


def convert_config_value(key, value):
    field_info = LoopCoderArgs.model_fields.get(key)
    if field_info:
        if value.lower() in ["true", "false"]:
            return value.lower() == "true"
        elif "int" in str(field_info.annotation):
            return int(value)
        elif "float" in str(field_info.annotation):
            return float(value)
        else:
            return value
    else:
        printer.print_text(f"无效的配置项: {key}", style="red")
        return None


def global_config_path() -> str:
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME, CONFIG_FILE_NAME)


def project_config_path(project_root: str) -> str:
    return os.path.join(project_root, CONFIG_DIR_NAME, CONFIG_FILE_NAME)


def load_yaml_config(path: str) -> Dict[str, Any]:
    """ 读取 YAML 配置文件, 文件不存在或内容不是映射时返回空配置 """
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    if not isinstance(config, dict):
        logger.warning(f"配置文件 {path} 内容不是映射, 已忽略")
        return {}
    return config


def load_env_config(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    environ = os.environ if environ is None else environ
    config = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = name[len(ENV_PREFIX):].lower()
        if key in LoopCoderArgs.model_fields:
            config[key] = convert_config_value(key, value)
    return config


def convert_yaml_to_config(config: Dict[str, Any], args: Optional[LoopCoderArgs] = None) -> LoopCoderArgs:
    values = args.model_dump() if args is not None else {}
    for key, value in config.items():
        if key not in LoopCoderArgs.model_fields:
            logger.warning(f"未知配置项 {key}, 已跳过")
            continue
        # key: ENV {{VARIABLE_NAME}}
        if isinstance(value, str) and value.startswith("ENV"):
            template = Template(value.removeprefix("ENV").strip())
            value = template.render(os.environ)
        values[key] = value
    return LoopCoderArgs(**values)


def get_final_config(project_root: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> LoopCoderArgs:
    """
    合并配置, 优先级从低到高:
    默认值 -> ~/.loopcoder/config.yml -> <project>/.loopcoder/config.yml -> LOOPCODER_* 环境变量
    """
    args = convert_yaml_to_config(load_yaml_config(global_config_path()))
    if project_root:
        args = convert_yaml_to_config(load_yaml_config(project_config_path(project_root)), args)
    args = convert_yaml_to_config(load_env_config(environ), args)
    if project_root:
        args.source_dir = os.path.abspath(project_root)
    return args


def save_project_config(project_root: str, key: str, value: Any):
    """ 将单个配置项写入项目配置文件 """
    path = project_config_path(project_root)
    config = load_yaml_config(path)
    config[key] = value
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(convert_yaml_config_to_str(config))
    logger.info(f"配置已保存 {key} -> {path}")
