import os


def data_dir() -> str:
    """Directory for locally persisted client state (project-root ``data/``)."""
    base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
    return os.environ.get('VOLUNTEERSYNC_DATA_DIR') or os.path.join(base_dir, 'data')
