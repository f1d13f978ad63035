import os
import configparser
from pathlib import Path

ENV_CONFIG_PATH = 'FRANCHISE_OPS_CONFIG'
ENV_DATABASE_URL = 'FRANCHISE_OPS_DATABASE_URL'

DEFAULTS = {
    'DATABASE': {
        'engine': 'postgresql',
        'host': 'localhost',
        'port': '5432',
        'database': 'franchise_ops',
        'username': 'postgres',
        'password': 'postgres',
        'echo': 'False',
        'pool_size': '10',
        'max_overflow': '20',
        'pool_timeout': '30',
        'pool_recycle': '1800'
    },
    'LOGGING': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'directory': 'logs',
        'max_size_mb': '10',
        'backup_count': '5',
        'console_output': 'True'
    },
    'BUSINESS_RULES': {
        'floor_order_total': 'True',
        'shipment_reservation_units': '1'
    },
    'REPORTING': {
        'lookback_months': '6',
        'expansion_threshold': '1.5'
    }
}

class Config:
    """Configuration manager for Franchise Operations."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the configuration if not already initialized."""
        if self._initialized:
            return

        self._config_path = Path(os.getenv(ENV_CONFIG_PATH, Path('config') / 'settings.ini'))
        self._config = configparser.ConfigParser(interpolation=None)
        self.reload()

        self._initialized = True

    def reload(self):
        """Load built-in defaults, then the settings file on top of them."""
        self._config.clear()
        self._config.read_dict(DEFAULTS)

        if self._config_path.exists():
            self._config.read(self._config_path)

    def _save_config(self):
        """Save configuration to file."""
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, 'w') as configfile:
            self._config.write(configfile)

    def get(self, section, key, default=None):
        """Get configuration value."""
        try:
            return self._config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return default

    def get_int(self, section, key, default=None):
        """Get configuration value as integer."""
        try:
            return self._config.getint(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get_float(self, section, key, default=None):
        """Get configuration value as float."""
        try:
            return self._config.getfloat(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get_boolean(self, section, key, default=None):
        """Get configuration value as boolean."""
        try:
            return self._config.getboolean(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def set(self, section, key, value, persist=True):
        """Set configuration value.

        Args:
            section: Config section name
            key: Option name
            value: New value, stored as a string
            persist: Write the settings file after updating
        """
        if not self._config.has_section(section):
            self._config.add_section(section)

        self._config.set(section, key, str(value))
        if persist:
            self._save_config()

    def get_db_url(self):
        """Generate SQLAlchemy database URL."""
        if os.getenv(ENV_DATABASE_URL):
            return os.getenv(ENV_DATABASE_URL)

        engine = self.get('DATABASE', 'engine', 'postgresql')
        database = self.get('DATABASE', 'database', 'franchise_ops')

        if engine.startswith('sqlite'):
            return f"{engine}:///{database}"

        username = self.get('DATABASE', 'username', 'postgres')
        password = self.get('DATABASE', 'password', 'postgres')
        host = self.get('DATABASE', 'host', 'localhost')
        port = self.get('DATABASE', 'port', '5432')

        return f"{engine}://{username}:{password}@{host}:{port}/{database}"

    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True)
        }

    @property
    def business_rules(self):
        """Get business rules configuration."""
        return {
            'floor_order_total': self.get_boolean('BUSINESS_RULES', 'floor_order_total', True),
            'shipment_reservation_units': self.get_int('BUSINESS_RULES', 'shipment_reservation_units', 1)
        }

    @property
    def reporting_config(self):
        """Get reporting configuration."""
        return {
            'lookback_months': self.get_int('REPORTING', 'lookback_months', 6),
            'expansion_threshold': self.get_float('REPORTING', 'expansion_threshold', 1.5)
        }

# Global config instance
config = Config()
