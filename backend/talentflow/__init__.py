"""TalentFlow client-side data layer."""

__version__ = "0.1.0"
