"""Visitor identity as passed by the world platform in the query string."""

from pydantic import BaseModel, Field

from services.garden.store import key_ref


class Credentials(BaseModel):
    """Who is calling, from which world, about which plot asset."""

    visitor_id: str = Field(min_length=1)
    url_slug: str = Field(min_length=1)
    profile_id: str = Field(min_length=1)
    display_name: str = ""
    asset_id: str = ""  # the plot asset the visitor interacted with

    @property
    def visitor_ref(self) -> str:
        """Stable per-world key for the visitor's garden state."""
        return key_ref(self.url_slug, self.profile_id)

    @property
    def plot_ref(self) -> str:
        return key_ref(self.url_slug, self.asset_id)
