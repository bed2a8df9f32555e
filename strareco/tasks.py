from .tasks_compare import compare
from .tasks_efficiency import efficiency
from .tasks_reco import analyse_mc

__all__ = ["analyse_mc", "compare", "efficiency"]
