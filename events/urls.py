from django.urls import path

from .views import (
    EventListCreateView,
    EventDetailView,
    EventApprovalView,
    EventRejectView,
    EventCompleteView,
    MyAppliedEventsView,
    MyCompletedEventsView,
    MyOrganizedEventsView,
    ApplyEventView,
    CancelRegistrationView,
    EventRegistrationsView,
    ApproveRegistrationView,
    RejectRegistrationView,
    RemoveRegistrationView,
    MarkAttendanceView,
    FinalizeAttendanceView,
    RateVolunteerView,
    SubmitVolunteerFeedbackView,
    EventFeedbackStatsView,
)

urlpatterns = [
    path("", EventListCreateView.as_view(), name="event-list"),

    # Caller-scoped listings (before <int:event_id>/ for readability)
    path("applied/", MyAppliedEventsView.as_view(), name="my-applied-events"),
    path("completed/", MyCompletedEventsView.as_view(), name="my-completed-events"),
    path("mine/", MyOrganizedEventsView.as_view(), name="my-organized-events"),

    path("<int:event_id>/", EventDetailView.as_view(), name="event-detail"),
    path("<int:event_id>/approve/", EventApprovalView.as_view(), name="event-approve"),
    path("<int:event_id>/reject/", EventRejectView.as_view(), name="event-reject"),
    path("<int:event_id>/complete/", EventCompleteView.as_view(), name="event-complete"),

    # Registrations
    path("<int:event_id>/apply/", ApplyEventView.as_view(), name="event-apply"),
    path("<int:event_id>/cancel/", CancelRegistrationView.as_view(), name="event-cancel"),
    path("<int:event_id>/volunteers/", EventRegistrationsView.as_view(), name="event-volunteers"),
    path(
        "<int:event_id>/registrations/<int:volunteer_id>/",
        RemoveRegistrationView.as_view(),
        name="registration-remove",
    ),
    path(
        "<int:event_id>/registrations/<int:volunteer_id>/approve/",
        ApproveRegistrationView.as_view(),
        name="registration-approve",
    ),
    path(
        "<int:event_id>/registrations/<int:volunteer_id>/reject/",
        RejectRegistrationView.as_view(),
        name="registration-reject",
    ),

    # Attendance
    path("<int:event_id>/attendance/", MarkAttendanceView.as_view(), name="event-attendance"),
    path(
        "<int:event_id>/attendance/finalize/",
        FinalizeAttendanceView.as_view(),
        name="event-attendance-finalize",
    ),

    # Ratings & feedback
    path("<int:event_id>/rate-volunteer/", RateVolunteerView.as_view(), name="event-rate-volunteer"),
    path(
        "<int:event_id>/volunteer-feedback/",
        SubmitVolunteerFeedbackView.as_view(),
        name="event-volunteer-feedback",
    ),
    path("<int:event_id>/feedback/stats/", EventFeedbackStatsView.as_view(), name="event-feedback-stats"),
]
