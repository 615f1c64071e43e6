"""Command line tools for ImpactCRM."""
