"""Store catalog service: categories and products with filtered listings."""
