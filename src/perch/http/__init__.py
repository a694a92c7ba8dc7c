"""HTTP value types: Request, Headers, Response, and the ResponseBuilder."""
