# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import pandas as pd

from ..common.constants import RECORD_CREATED_TIME, RECORD_ID


def records_to_dataframe(records: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    """Build a DataFrame from typed records, with ``id`` and ``createdTime`` as the leading columns.

    Columns follow first appearance across the records; a field absent from a record is NaN.
    Multi-value fields (linked records, attachments) stay as Python lists.
    """
    columns: List[str] = [RECORD_ID, RECORD_CREATED_TIME]
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return pd.DataFrame.from_records(list(records), columns=columns)
