# franchise_ops/scripts/setup_db.py
import argparse
import sys

from sqlalchemy import inspect, text

from franchise_ops.db import db
from franchise_ops.exceptions import DatabaseError
from franchise_ops.logging_setup import get_logger

logger = get_logger('db_setup')

def setup_database(drop_existing=False, connection_string=None):
    """Set up the database schema.

    Args:
        drop_existing: If True, drop existing tables before creating new ones
        connection_string: Optional database URL, defaults to configuration

    Returns:
        True if setup was successful, False otherwise
    """
    try:
        if connection_string is not None:
            db.initialize(connection_string)

        logger.info(f"Database backend: {db.engine.dialect.name}")

        if drop_existing:
            logger.info("Dropping all existing tables...")
            db.drop_all_tables()
            logger.info("All tables dropped successfully.")

        logger.info("Creating database tables...")
        db.create_all_tables()
        logger.info(f"Database tables created: {', '.join(sorted(inspect(db.engine).get_table_names()))}")

        return True
    except Exception as e:
        logger.error(f"Error setting up database: {str(e)}")
        logger.exception(e)
        return False

def check_connection(connection_string=None):
    """Check that the configured database answers a trivial query."""
    db.initialize(connection_string)

    try:
        with db.session_scope() as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        raise DatabaseError(f"Connection test failed: {str(e)}") from e

    logger.info(f"Successfully connected to {db.engine.dialect.name} database!")

def main():
    """Main function for database setup script."""
    parser = argparse.ArgumentParser(description='Set up the Franchise Operations database.')
    parser.add_argument('--drop', action='store_true', help='Drop existing tables before creating new ones')
    parser.add_argument('--url', type=str, help='Database URL (overrides configuration)')
    parser.add_argument('--test-connection', action='store_true', help='Test database connection')

    args = parser.parse_args()

    if args.test_connection:
        try:
            check_connection(args.url)
        except DatabaseError as e:
            logger.error(str(e))
            sys.exit(1)
        return

    logger.info("Starting database setup...")

    if setup_database(args.drop, args.url):
        logger.info("Database setup completed successfully.")
    else:
        logger.error("Database setup failed.")
        sys.exit(1)

if __name__ == '__main__':
    main()
