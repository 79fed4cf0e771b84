import json
import logging
import os

DEFAULTS = {
    'holiday_country': 'NL',
    'holiday_api_base': 'https://date.nager.at/api/v3',
    'holiday_timeout': 10,
    'holidays_enabled': True,
    'db_path': None,
    'json_fallback_path': None,
    'log_level': 'INFO',
}


def _config_path():
    base = os.path.join(os.path.expanduser('~'), '.trainingplanner')
    os.makedirs(base, exist_ok=True)
    return os.path.join(base, 'trainingplanner_config.json')


def load_config():
    path = _config_path()
    cfg = dict(DEFAULTS)
    if not os.path.exists(path):
        return cfg
    try:
        with open(path, 'r', encoding='utf-8') as f:
            stored = json.load(f)
    except (OSError, ValueError) as e:
        logging.warning(f"Config {path} unreadable, using defaults: {e}")
        return cfg
    if isinstance(stored, dict):
        cfg.update(stored)
    return cfg


def save_config(cfg: dict):
    path = _config_path()
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)
