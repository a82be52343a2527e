import logging
from logging.config import fileConfig
from pathlib import Path

from flask import current_app
from alembic import context

config = context.config

# alembic.ini lives next to this file; don't crash when it is absent
if config.config_file_name and Path(config.config_file_name).exists():
    fileConfig(config.config_file_name)
else:
    logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("alembic.env")

# Flask-SQLAlchemy 3.x exposes the engine directly
target_db = current_app.extensions["migrate"].db


def get_engine_url():
    return target_db.engine.url.render_as_string(hide_password=False).replace("%", "%%")


config.set_main_option("sqlalchemy.url", get_engine_url())


def get_metadata():
    if hasattr(target_db, "metadatas"):
        return target_db.metadatas[None]
    return target_db.metadata


def _include_object(object, name, type_, reflected, compare_to):
    # Never propose dropping an index that only exists in the database.
    if type_ == "index" and reflected and compare_to is None:
        return False
    return True


def run_migrations_offline():
    """Run migrations in 'offline' mode."""
    import mfms.models  # noqa: F401  (registers every table on the metadata)

    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=get_metadata(),
        literal_binds=True,
        compare_type=True,
        include_object=_include_object,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations in 'online' mode."""
    import mfms.models  # noqa: F401

    def process_revision_directives(context_, revision, directives):
        # Skip empty autogenerate revisions
        if getattr(config.cmd_opts, "autogenerate", False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info("No changes in schema detected.")

    conf_args = {
        **current_app.extensions["migrate"].configure_args,
        "process_revision_directives": process_revision_directives,
        "compare_type": True,
        "include_object": _include_object,
        "target_metadata": get_metadata(),
    }

    with target_db.engine.connect() as connection:
        context.configure(connection=connection, **conf_args)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
