from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from ..models.base import as_utc

# Serialized with an explicit UTC offset whatever the backing store returns
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
