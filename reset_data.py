"""
reset_data.py
-------------
Utility script to clear all stored data (customers, vehicles, rentals,
booking requests, staff logs) from the configured database.

This script is designed for development and testing purposes.
It drops every table and recreates the empty schema, including the
rental overlap trigger.

Usage:
    $ python reset_data.py

After running this script, you can repopulate sample data by executing:
    $ python seeds.py
"""

from fleetdesk import create_app
from fleetdesk.models import db


def main():
    """Drop and recreate the schema of the configured database."""
    app = create_app()
    with app.app_context():
        db.drop_all()
        db.create_all()

        print(f"✅ {app.config['SQLALCHEMY_DATABASE_URI']} has been successfully cleared.")
        print("💡 Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
