from homecare.db.base_class import Base  # noqa: F401

# Import models here so create_all can find them
from homecare.db.models.poc import Poc, PocDuty  # noqa: F401
from homecare.db.models.log import PocDailyLog  # noqa: F401
from homecare.db.models.log_task import PocDailyTaskLog  # noqa: F401
from homecare.db.models.service import Service  # noqa: F401
from homecare.db.models.activity import ActivityLog  # noqa: F401
