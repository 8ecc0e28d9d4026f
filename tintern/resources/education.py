"""Education entries of the user profile."""

from tintern.resources.manager import OptimisticCollection
from tintern.resources.models import EducationEntry


class EducationManager(OptimisticCollection[EducationEntry]):
    model = EducationEntry
    resource_path = "/users/education"
    envelope_keys = ("educations", "education", "data")
    item_keys = ("education", "data")
    scope = "education"
