# Schemas package: request/response DTOs
