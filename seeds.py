from fleetdesk import create_app
from fleetdesk.models import db, RentalRepository


def ensure_customer(repo: RentalRepository, full_name: str, email: str, phone: str):
    """
    Ensure a customer with `email` exists.
    - If exists: keep the row (idempotent).
    - If not:   create a new active customer.
    """
    customer = repo.find_customer_by_email(email)
    if customer:
        return customer.id
    return repo.add_customer(full_name, email, phone=phone).id


def main():
    app = create_app()
    with app.app_context():
        repo = RentalRepository(db.session)

        with repo.atomic():
            # ---- Demo customers ----
            ensure_customer(repo, "Aisyah Rahman", "aisyah@example.com", "+60123456789")
            ensure_customer(repo, "Daniel Lim", "daniel@example.com", "+60129876543")

            # ---- Demo fleet (create only if none exist) ----
            if not repo.list_vehicles():
                repo.add_vehicle("Perodua Axia", category="car", mileage_limit=300)
                repo.add_vehicle("Perodua Bezza", category="car", mileage_limit=300)
                repo.add_vehicle("Toyota Vios", category="car", mileage_limit=250)
                repo.add_vehicle("Yamaha Y15ZR", category="motorbike", mileage_limit=150)

        print("✅ Seed complete.")
        print("👤 Customer logins: aisyah@example.com, daniel@example.com")


if __name__ == "__main__":
    main()
