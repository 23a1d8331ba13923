"""Role-based access control for the back-office client."""
