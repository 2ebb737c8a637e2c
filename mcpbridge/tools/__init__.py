"""Tool sets served by the embedded provider."""
