import os
from pathlib import Path
from .constants import DATA_DIR, DB_FILE_NAME, DB_ENV_VAR

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR / DATA_DIR
DB_PATH = Path(os.environ[DB_ENV_VAR]) if os.environ.get(DB_ENV_VAR) else DATA_PATH / DB_FILE_NAME
