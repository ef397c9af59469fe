from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UpstreamResponse:
	"""Status and decoded JSON body returned by the dashboard API."""

	status_code: int
	payload: Any

	@property
	def ok(self) -> bool:
		return 200 <= self.status_code < 300


class AbstractDashboardClient(ABC):
	"""Interface for the upstream dashboard API that owns reports and forms."""

	@abstractmethod
	async def submit_case(self, payload: dict[str, Any]) -> UpstreamResponse:
		"""Create a case from a validated public submission.

		Args:
			payload: Case fields in the dashboard's camelCase wire format.

		Returns:
			UpstreamResponse: Status and JSON body from the dashboard.

		Raises:
			UpstreamAppError: If the dashboard cannot be reached or does not answer JSON.
		"""
		...

	@abstractmethod
	async def submit_report(self, body: bytes, content_type: str) -> UpstreamResponse:
		"""Forward a raw report submission (JSON or multipart with files)."""
		...

	@abstractmethod
	async def track_report(self, tracking_id: str, password: str | None = None) -> UpstreamResponse:
		"""Look up a report's status by tracking id."""
		...

	@abstractmethod
	async def get_form_config(self, subdomain: str) -> UpstreamResponse:
		"""Fetch the branded form configuration for a company subdomain."""
		...

	@abstractmethod
	async def health_check(self) -> bool:
		"""Return True when the dashboard answers its health probe."""
		...
