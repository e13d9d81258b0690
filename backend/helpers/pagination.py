"""
Standardized pagination parameters for list endpoints.
"""

from fastapi import Query
from typing import Annotated

# Standard pagination for catalogue and learner lists
PaginationSkip = Annotated[int, Query(ge=0, description="Number of records to skip")]
PaginationLimit = Annotated[
    int, Query(ge=1, le=100, description="Maximum number of records to return")
]

# Admin panels (users, transactions, reports)
PaginationLimitLarge = Annotated[
    int, Query(ge=1, le=200, description="Maximum number of records to return")
]
