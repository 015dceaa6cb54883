from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("notifications", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="notification",
            name="topic",
            field=models.CharField(
                choices=[
                    ("registrationUpdated", "Registration Updated"),
                    ("attendanceUpdated", "Attendance Updated"),
                    ("certificateReady", "Certificate Ready"),
                    ("ratingUpdated", "Rating Updated"),
                    ("feedbackSubmitted", "Feedback Submitted"),
                    ("eventCompleted", "Event Completed"),
                    ("eventDeleted", "Event Deleted"),
                    ("eventUpdated", "Event Updated"),
                    ("eventRejected", "Event Rejected"),
                ],
                max_length=64,
            ),
        ),
    ]
