import sqlite3
from contextlib import contextmanager
import logging
from splitpay.core.config import ServerConfig # Import ServerConfig

logger = logging.getLogger(__name__)

@contextmanager
def get_db():
    conn = sqlite3.connect(ServerConfig.DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    except Exception as e:
        conn.rollback()
        raise e
    finally:
        conn.close()

def init_database():
    with get_db() as conn:
        cursor = conn.cursor()

        # Create organizations table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS organizations (
                organization_id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        # Create employees table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS employees (
                employee_id TEXT PRIMARY KEY,
                organization_id TEXT,
                staff_id TEXT UNIQUE,
                full_name TEXT NOT NULL,
                morning_wage_rate REAL,
                night_wage_rate REAL,
                status TEXT DEFAULT 'active',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (organization_id) REFERENCES organizations (organization_id)
            )
        ''')

        # Create wage_settings table, every column nullable so gaps fall back to defaults
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS wage_settings (
                organization_id TEXT PRIMARY KEY,
                morning_start_time TEXT,
                morning_end_time TEXT,
                night_start_time TEXT,
                night_end_time TEXT,
                working_hours_window_enabled BOOLEAN,
                working_hours_start_time TEXT,
                working_hours_end_time TEXT,
                morning_wage_rate REAL,
                night_wage_rate REAL,
                default_flat_wage_rate REAL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (organization_id) REFERENCES organizations (organization_id)
            )
        ''')

        # Create timesheet_entries table
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS timesheet_entries (
                entry_id TEXT PRIMARY KEY,
                organization_id TEXT,
                employee_id TEXT,
                employee_name TEXT,
                clock_in_date DATE NOT NULL,
                clock_in_time TEXT NOT NULL,
                clock_out_date DATE,
                clock_out_time TEXT,
                total_hours REAL,
                morning_hours REAL,
                night_hours REAL,
                total_card_amount_flat REAL,
                total_card_amount_split REAL,
                is_split_calculation BOOLEAN DEFAULT FALSE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        # Create index for efficient payroll queries
        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_timesheet_lookup
            ON timesheet_entries (organization_id, clock_in_date, employee_id)
        ''')

        conn.commit()
        logger.info("Database initialized successfully with wage settings support")

def seed_test_data():
    """Add a test organization, employees and shifts for development/testing"""
    with get_db() as conn:
        cursor = conn.cursor()

        # Check if we already have employees
        cursor.execute("SELECT COUNT(*) FROM employees")
        count = cursor.fetchone()[0]

        if count > 0:
            logger.info(f"Database already has {count} employees")
            return

        cursor.execute(
            "INSERT INTO organizations (organization_id, name) VALUES (?, ?)",
            ("org-demo", "Demo Organization"),
        )

        # Only the rates are configured, windows fall back to the defaults
        cursor.execute('''
            INSERT INTO wage_settings (organization_id, morning_wage_rate, night_wage_rate, default_flat_wage_rate)
            VALUES (?, ?, ?, ?)
        ''', ("org-demo", 17.0, 20.0, 20.0))

        test_employees = [
            ("emp-1", "org-demo", "EMP001", "John Doe", None, None),
            ("emp-2", "org-demo", "EMP002", "Jane Smith", 18.5, 22.0),
            ("emp-3", "org-demo", "EMP003", "Bob Johnson", None, 21.0),
        ]

        cursor.executemany('''
            INSERT INTO employees (employee_id, organization_id, staff_id, full_name, morning_wage_rate, night_wage_rate)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', test_employees)

        test_entries = [
            ("seed-1", "org-demo", "emp-1", "John Doe", "2025-01-06", "09:00:00", "2025-01-06", "18:00:00"),
            ("seed-2", "org-demo", "emp-2", "Jane Smith", "2025-01-06", "16:00:00", "2025-01-07", "00:30:00"),
            # Legacy row without organization, identified by staff id only
            ("seed-3", None, None, "EMP003", "2025-01-07", "12:00:00", "2025-01-07", "20:00:00"),
        ]

        cursor.executemany('''
            INSERT INTO timesheet_entries
            (entry_id, organization_id, employee_id, employee_name, clock_in_date, clock_in_time, clock_out_date, clock_out_time)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', test_entries)

        conn.commit()
        logger.info(f"Added {len(test_employees)} test employees and {len(test_entries)} shifts to database")
