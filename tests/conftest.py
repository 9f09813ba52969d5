import os

from hypothesis import settings

# Use hypothesis profile for CI, e.g. HYPOTHESIS_PROFILE=ci pytest
settings.register_profile("ci", max_examples=10, deadline=None)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))
