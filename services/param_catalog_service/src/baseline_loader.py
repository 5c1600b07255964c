import json
from pathlib import Path
from typing import Any, List, Union

import aiofiles
from pydantic import ValidationError

from shared.common_utils.logger import logger
from .catalog import Catalog
from .errors import BaselineLoadError
from .schemas import ParameterInfo
from .validator import BASELINE_SCHEMA, CatalogValidationError, validate_reply_structure

DEFAULT_BASELINE_PATH = Path(__file__).resolve().parent.parent / "data" / "config-index.json"

BaselineSource = Union[bytes, str, List[Any]]


def load_baseline(data: BaselineSource) -> Catalog:
    """
    Build a catalog from the baseline dataset.

    ``data`` is the raw JSON document (bytes or text) or an already decoded
    list of records. Any problem is fatal: no partial catalog is returned.
    """
    if isinstance(data, (bytes, str)):
        try:
            records = json.loads(data)
        except ValueError as e:
            raise BaselineLoadError(f"Baseline dataset is not valid JSON: {e}") from e
    else:
        records = data

    if not isinstance(records, list):
        raise BaselineLoadError(
            f"Baseline dataset must be a JSON array, got {type(records).__name__}"
        )

    try:
        validate_reply_structure(records, BASELINE_SCHEMA)
        params = [ParameterInfo.model_validate(record) for record in records]
        catalog = Catalog(params)
    except (ValidationError, CatalogValidationError) as e:
        raise BaselineLoadError(f"Baseline dataset is malformed: {e}") from e

    logger.info(f"Loaded {len(catalog)} parameters from baseline dataset")
    return catalog


async def load_baseline_file(path: Union[str, Path] = DEFAULT_BASELINE_PATH) -> Catalog:
    """Read the baseline dataset from disk and build a catalog from it."""
    resolved_path = Path(path).resolve()
    logger.info(f"Loading baseline dataset from {resolved_path}")
    try:
        async with aiofiles.open(resolved_path, "rb") as f:
            content = await f.read()
    except OSError as e:
        raise BaselineLoadError(f"Could not read baseline dataset {resolved_path}: {e}") from e
    return load_baseline(content)
