# migrate_db.py
from examhall import create_app
from examhall.extensions import db

# Columns added after the first release: (table, column, type, default)
NEW_COLUMNS = [
    ('exam', 'description', 'TEXT', "''"),
    ('exam', 'assigned_to', 'JSON', None),
    ('exam', 'created_by', 'VARCHAR(120)', None),
    ('exam', 'updated_at', 'TIMESTAMP WITH TIME ZONE', None),
    ('exam_submission', 'total_marks', 'INTEGER', '0'),
    ('exam_submission', 'time_taken', 'INTEGER', '0'),
    ('users', 'student_id', 'VARCHAR(64)', None),
    ('assignment', 'max_score', 'INTEGER', '100'),
]


def migrate_database():
    """Add missing columns to existing tables"""
    app = create_app()

    with app.app_context():
        print(f"\n{'='*50}")
        print("DATABASE MIGRATION")
        print(f"{'='*50}")

        inspector = db.inspect(db.engine)
        existing_tables = set(inspector.get_table_names())

        with db.engine.begin() as connection:
            for table, col_name, col_type, default_val in NEW_COLUMNS:
                if table not in existing_tables:
                    print(f"  - {table} missing (created by create_all)")
                    continue

                columns = [c['name'] for c in inspector.get_columns(table)]
                if col_name in columns:
                    print(f"  - {table}.{col_name} exists")
                    continue

                if default_val:
                    query = f'ALTER TABLE {table} ADD COLUMN {col_name} {col_type} DEFAULT {default_val}'
                else:
                    query = f'ALTER TABLE {table} ADD COLUMN {col_name} {col_type}'
                connection.execute(db.text(query))
                print(f"  Added {table}.{col_name}")

        print(f"\n{'='*50}")
        print("MIGRATION COMPLETED")
        print(f"{'='*50}")


if __name__ == '__main__':
    migrate_database()
