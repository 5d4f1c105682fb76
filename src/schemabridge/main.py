from fastapi import FastAPI, HTTPException

from schemabridge.router import route
from schemabridge.utils.exceptions import SchemaBridgeError

app = FastAPI(
    title="Vertica Schema Bridge",
    version="1.0.0"
)


@app.post("/table-ddl")
def table_ddl(payload: dict):
    try:
        return route(payload)
    except (SchemaBridgeError, ValueError) as e:
        # Unconvertible input → client error, not server crash
        raise HTTPException(
            status_code=422,
            detail={
                "status": "ERROR",
                "error_type": type(e).__name__,
                "message": str(e),
            }
        )
