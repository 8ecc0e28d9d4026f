"""Work experience entries of the user profile."""

from tintern.resources.manager import OptimisticCollection
from tintern.resources.models import ExperienceEntry


class ExperienceManager(OptimisticCollection[ExperienceEntry]):
    model = ExperienceEntry
    resource_path = "/users/experience"
    envelope_keys = ("experiences", "experience", "data")
    item_keys = ("experience", "data")
    scope = "experience"
