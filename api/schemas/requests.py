from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigUpdateRequest(BaseModel):
	"""Partial configuration update; omitted fields keep their current value."""

	model_config = ConfigDict(
		extra='forbid',
		json_schema_extra={'example': {'refresh_interval_ms': 60000, 'fallback_rate': 16.3}},
	)

	base_currency: str | None = Field(None, min_length=3, max_length=5)
	target_currency: str | None = Field(None, min_length=3, max_length=5)
	refresh_interval_ms: int | None = Field(None, gt=0)
	fallback_rate: Decimal | None = Field(None, gt=0)
	sources: list[str] | None = Field(None, min_length=1)

	@field_validator('base_currency', 'target_currency')
	@classmethod
	def uppercase_currency(cls, v: str | None):
		return v.upper() if v else v

	@field_validator('sources')
	@classmethod
	def lowercase_sources(cls, v: list[str] | None):
		return [s.strip().lower() for s in v] if v else v

	def changes(self) -> dict:
		data = self.model_dump(exclude_unset=True)
		if data.get('sources') is not None:
			data['sources'] = tuple(data['sources'])
		return data
