"""Field types shared by the API schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from fit_tracker.services.dates import as_utc

# SQLite returns naive datetimes; responses always carry an explicit UTC offset.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
