import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Report",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(verbose_name="Description")),
                ("category", models.CharField(choices=[("WATER_SUPPLY_DRINKING_WATER", "Water Supply - Drinking Water"), ("ARCHITECTURAL_BARRIERS", "Architectural Barriers"), ("SEWER_SYSTEM", "Sewer System"), ("PUBLIC_LIGHTING", "Public Lighting"), ("WASTE", "Waste"), ("ROAD_SIGNS_TRAFFIC_LIGHTS", "Road Signs and Traffic Lights"), ("ROADS_URBAN_FURNISHINGS", "Roads and Urban Furnishings"), ("PUBLIC_GREEN_AREAS_PLAYGROUNDS", "Public Green Areas and Playgrounds"), ("OTHER", "Other")], db_index=True, max_length=50, verbose_name="Category")),
                ("latitude", models.FloatField(verbose_name="Latitude")),
                ("longitude", models.FloatField(verbose_name="Longitude")),
                ("anonymous", models.BooleanField(default=False, verbose_name="Anonymous")),
                ("status", models.CharField(choices=[("PENDING_APPROVAL", "Pending Approval"), ("ASSIGNED", "Assigned"), ("IN_PROGRESS", "In Progress"), ("SUSPENDED", "Suspended"), ("REJECTED", "Rejected"), ("RESOLVED", "Resolved")], db_index=True, default="PENDING_APPROVAL", max_length=30, verbose_name="Status")),
                ("rejection_reason", models.TextField(blank=True, default="", verbose_name="Rejection Reason")),
                ("assigned_office", models.CharField(blank=True, default="", max_length=100, verbose_name="Assigned Office")),
                ("assigned_officer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="assigned_reports", to=settings.AUTH_USER_MODEL, verbose_name="Assigned Officer")),
                ("external_maintainer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="delegated_reports", to=settings.AUTH_USER_MODEL, verbose_name="External Maintainer")),
                ("submitted_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="submitted_reports", to=settings.AUTH_USER_MODEL, verbose_name="Submitted By")),
            ],
            options={
                "verbose_name": "Report",
                "verbose_name_plural": "Reports",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ReportPhoto",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("image", models.ImageField(upload_to="report_photos/%Y/%m/", verbose_name="Image")),
                ("position", models.PositiveSmallIntegerField(default=1, verbose_name="Position")),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="photos", to="reports.report", verbose_name="Report")),
            ],
            options={
                "verbose_name": "Report Photo",
                "verbose_name_plural": "Report Photos",
                "ordering": ["position"],
            },
        ),
        migrations.CreateModel(
            name="Comment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("content", models.TextField(verbose_name="Content")),
                ("external_maintainer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="maintainer_comments", to=settings.AUTH_USER_MODEL, verbose_name="Maintainer Author")),
                ("municipality_user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="municipality_comments", to=settings.AUTH_USER_MODEL, verbose_name="Municipality Author")),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="comments", to="reports.report", verbose_name="Report")),
            ],
            options={
                "verbose_name": "Comment",
                "verbose_name_plural": "Comments",
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("external_maintainer__isnull", True), ("municipality_user__isnull", False))
                        | models.Q(("external_maintainer__isnull", False), ("municipality_user__isnull", True)),
                        name="comment_exactly_one_author",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReportStatusLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_status", models.CharField(blank=True, default="", max_length=30, verbose_name="From Status")),
                ("to_status", models.CharField(choices=[("PENDING_APPROVAL", "Pending Approval"), ("ASSIGNED", "Assigned"), ("IN_PROGRESS", "In Progress"), ("SUSPENDED", "Suspended"), ("REJECTED", "Rejected"), ("RESOLVED", "Resolved")], max_length=30, verbose_name="To Status")),
                ("message", models.TextField(blank=True, default="", verbose_name="Message")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("changed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="report_status_changes", to=settings.AUTH_USER_MODEL, verbose_name="Changed By")),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_logs", to="reports.report", verbose_name="Report")),
            ],
            options={
                "verbose_name": "Report Status Log",
                "verbose_name_plural": "Report Status Logs",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
