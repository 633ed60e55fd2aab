from pathlib import Path

from cafeteria.utilities.config import DATA_DIR

# Names of the four durable documents (single source of truth)
INVENTORY_DOC = 'inventory'
RECEIVING_DOC = 'receiving'
CONSUMPTION_DOC = 'consumption'
CATEGORIES_DOC = 'categories'

DOCUMENTS = (INVENTORY_DOC, RECEIVING_DOC, CONSUMPTION_DOC, CATEGORIES_DOC)


def document_path(data_dir: Path, name: str) -> Path:
    return Path(data_dir) / f'{name}.json'


__all__ = ['DATA_DIR', 'INVENTORY_DOC', 'RECEIVING_DOC', 'CONSUMPTION_DOC', 'CATEGORIES_DOC',
           'DOCUMENTS', 'document_path']
