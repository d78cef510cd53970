"""
Management command: setup_municipality_roles
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Seeds the database with the municipal offices that officers belong to.
Every office named in ``settings.REPORTS["CATEGORY_OFFICE_MAP"]`` (and the
default office) must exist here, otherwise approvals for that category
can never find an officer.

The command is **idempotent**: safe to run multiple times.  Existing
offices are kept; descriptions are refreshed.

Usage::

    python manage.py setup_municipality_roles
"""

from django.core.management.base import BaseCommand

from accounts.models import MunicipalityRole

# Office name → description
MUNICIPALITY_ROLES: dict[str, str] = {
    "municipal public relations officer": "Citizen relations and report intake.",
    "municipal administrator": "General administration; default office for unmapped categories.",
    "technical office staff member": "Public lighting and technical installations.",
    "finance and budget officer": "Budget and expenditure.",
    "urban planning specialist": "Architectural barriers and urban planning.",
    "public works project manager": "Water supply, sewer system, roads and urban furnishings.",
    "social services caseworker": "Social services.",
    "environmental protection officer": "Environmental protection.",
    "cultural affairs coordinator": "Cultural affairs.",
    "education and youth services officer": "Education and youth services.",
    "procurement and contracts specialist": "Procurement and external contracts.",
    "legal affairs counsel": "Legal affairs.",
    "it systems administrator": "IT systems.",
    "traffic and mobility coordinator": "Road signs, traffic lights and mobility.",
    "civil protection and emergency planner": "Civil protection and emergencies.",
    "sanitation and waste management officer": "Waste collection and sanitation.",
    "parks and green spaces officer": "Public green areas and playgrounds.",
    "civil registry clerk": "Civil registry.",
}


class Command(BaseCommand):
    help = (
        "Seeds the database with the municipality offices.  "
        "Safe to run multiple times (idempotent)."
    )

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  Seeding Municipality Roles"
            "\n══════════════════════════════════════════\n"
        ))

        created_count = 0
        updated_count = 0

        for name, description in MUNICIPALITY_ROLES.items():
            role, created = MunicipalityRole.objects.get_or_create(
                name=name,
                defaults={"description": description},
            )
            if created:
                created_count += 1
            else:
                if role.description != description:
                    role.description = description
                    role.save(update_fields=["description"])
                updated_count += 1

            action = "Created" if created else "Kept"
            self.stdout.write(self.style.SUCCESS(f"  ✔  {action} office: {name}"))

        self.stdout.write(self.style.SUCCESS(
            f"\n  Done!  {created_count} office(s) created, "
            f"{updated_count} already present.\n"
        ))
