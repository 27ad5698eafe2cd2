from datetime import date as Date
from typing import Optional, Union

from ..errors import ValidationError
from ..models import ActivityResponse, CreditsResponse
from .base import Resource


class CreditsResource(Resource):
    def get(self) -> CreditsResponse:
        """Total credits purchased and used on the account."""
        return self._dispatcher.dispatch("GET", "/credits", response_model=CreditsResponse)


class ActivityResource(Resource):
    def get(self, date: Optional[Union[str, Date]] = None) -> ActivityResponse:
        """
        Daily usage grouped by model endpoint.

        Args:
            date: Single UTC day to report (date or "YYYY-MM-DD"); None returns
                  the last 30 completed days
        """
        if isinstance(date, Date):
            date = date.isoformat()
        elif date is not None:
            try:
                Date.fromisoformat(date)
            except ValueError as e:
                raise ValidationError("date", f"must be YYYY-MM-DD, got {date!r}") from e

        return self._dispatcher.dispatch(
            "GET",
            "/activity",
            params={"date": date},
            response_model=ActivityResponse
        )
