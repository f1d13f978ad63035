from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from franchise_ops.config import config
from franchise_ops.exceptions import DatabaseError

logger = logging.getLogger(__name__)

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on foreign key enforcement for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

class Database:
    """Database connection manager for Franchise Operations.

    Owns the engine and the session factory. ``session_scope`` is the
    transaction boundary handed to services: everything done with the
    yielded session commits together or rolls back together.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Database, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the database manager if not already initialized."""
        if self._initialized:
            return

        self._engine = None
        self._session_factory = None
        self._initialized = True

    def initialize(self, connection_string=None, **engine_options):
        """Initialize database connection.

        Args:
            connection_string: Optional database connection string.
                              If not provided, will use configuration.
            **engine_options: Extra keyword arguments for ``create_engine``
        """
        if connection_string is None:
            connection_string = config.get_db_url()

        if self._engine is not None:
            self.dispose()

        try:
            url = make_url(connection_string)
        except ArgumentError as e:
            raise DatabaseError(f"Invalid database URL: {str(e)}")

        options = {'echo': config.get_boolean('DATABASE', 'echo', False)}

        if url.get_backend_name() == 'sqlite':
            options['connect_args'] = {'check_same_thread': False}
            if url.database in (None, '', ':memory:'):
                # One shared connection so every session sees the same in-memory database
                options['poolclass'] = StaticPool
        else:
            options.update({
                'pool_size': config.get_int('DATABASE', 'pool_size', 10),
                'max_overflow': config.get_int('DATABASE', 'max_overflow', 20),
                'pool_timeout': config.get_int('DATABASE', 'pool_timeout', 30),
                'pool_recycle': config.get_int('DATABASE', 'pool_recycle', 1800)
            })

        options.update(engine_options)

        try:
            self._engine = create_engine(url, **options)
        except Exception as e:
            raise DatabaseError(f"Failed to initialize database connection: {str(e)}")

        if url.get_backend_name() == 'sqlite':
            event.listen(self._engine, 'connect', _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(
            bind=self._engine,
            autoflush=False,
            expire_on_commit=False
        )

        logger.debug(f"Database initialized for backend {url.get_backend_name()}")

    def dispose(self):
        """Release all pooled connections and forget the engine."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def create_all_tables(self):
        """Create all tables defined in the models."""
        from franchise_ops.models import Base
        Base.metadata.create_all(self.engine)

    def drop_all_tables(self):
        """Drop all tables from the database."""
        from franchise_ops.models import Base
        Base.metadata.drop_all(self.engine)

    @property
    def engine(self):
        """Get the database engine."""
        if self._engine is None:
            self.initialize()
        return self._engine

    def get_session(self):
        """Get a new database session."""
        if self._session_factory is None:
            self.initialize()
        return self._session_factory()

    @contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

# Global database instance
db = Database()

def get_session():
    """Get a new database session."""
    return db.get_session()

@contextmanager
def session_scope():
    """Session scope context manager."""
    with db.session_scope() as session:
        yield session
