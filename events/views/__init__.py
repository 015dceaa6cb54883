from .events import (
    EventListCreateView,
    EventDetailView,
    EventApprovalView,
    EventRejectView,
    EventCompleteView,
    MyAppliedEventsView,
    MyCompletedEventsView,
    MyOrganizedEventsView,
)
from .registrations import (
    ApplyEventView,
    CancelRegistrationView,
    EventRegistrationsView,
    ApproveRegistrationView,
    RejectRegistrationView,
    RemoveRegistrationView,
)
from .attendance import MarkAttendanceView, FinalizeAttendanceView
from .feedback import RateVolunteerView, SubmitVolunteerFeedbackView, EventFeedbackStatsView
