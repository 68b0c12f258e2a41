"""Provider response mappers and request-callback builders."""
