"""Application services: authentication, OAuth sign-in and access control."""
