"""Static HTML pages for the site."""

from podsite.site.pages import PageRenderer, group_by_season

__all__ = ["PageRenderer", "group_by_season"]
