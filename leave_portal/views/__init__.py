from leave_portal.views.employee import EmployeeLeaveView
from leave_portal.views.manager import ManagerApprovalView

__all__ = ["EmployeeLeaveView", "ManagerApprovalView"]
