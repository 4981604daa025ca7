"""Pure exam domain logic shared by the API and the client."""
