from django.db import migrations

CREATE_CONSTRAINT = """
CREATE EXTENSION IF NOT EXISTS btree_gist;
ALTER TABLE bookings
    ADD CONSTRAINT bookings_no_overlap
    EXCLUDE USING gist (
        listing_id WITH =,
        tstzrange(start_time, end_time, '[)') WITH &&
    )
    WHERE (status <> 'cancelled');
"""

DROP_CONSTRAINT = "ALTER TABLE bookings DROP CONSTRAINT IF EXISTS bookings_no_overlap;"


def add_exclusion_constraint(apps, schema_editor):
    # Other backends rely on the row lock taken by the repository
    if schema_editor.connection.vendor == 'postgresql':
        schema_editor.execute(CREATE_CONSTRAINT)


def drop_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor == 'postgresql':
        schema_editor.execute(DROP_CONSTRAINT)


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(add_exclusion_constraint, drop_exclusion_constraint),
    ]
