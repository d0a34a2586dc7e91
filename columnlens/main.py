"""
ColumnLens FastAPI Backend
Main application entry point
"""
from fastapi import FastAPI, UploadFile, File, HTTPException, Query, Body
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict
import uvicorn

from columnlens.column_analyzer import SQLQueryAnalyzer, DebugLogger, QueryAnalysisError
from columnlens.column_mapper import ColumnMapper
from columnlens.config import get_settings

API_VERSION = "1.0.0"
MODE_NAMES = "names"
MODE_DETAILED = "detailed"

settings = get_settings()
if settings.debug_logging:
    DebugLogger.enable()

app = FastAPI(title="ColumnLens API", version=API_VERSION)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Analyzers keep no per-query state, so one instance serves every request
analyzer = SQLQueryAnalyzer(strip_comments=settings.strip_comments)
column_mapper = ColumnMapper(analyzer)


@app.get("/")
async def root():
    return {"message": "ColumnLens API", "version": API_VERSION}


@app.get("/api/")
async def api_root():
    return {"message": "ColumnLens API", "version": API_VERSION}


@app.post("/api/query/columns")
async def query_columns(request: Dict = Body(...)):
    """
    Predict the result-set column names of a SELECT query.

    Supports two modes:
    - mode="names" (default): Returns the ordered column names
    - mode="detailed": Also returns the expression and naming rule behind each name
    """
    query_text = request.get("query")
    mode = request.get("mode", MODE_NAMES)

    if mode not in (MODE_NAMES, MODE_DETAILED):
        raise HTTPException(status_code=400, detail=f"Mode must be '{MODE_NAMES}' or '{MODE_DETAILED}'")

    try:
        details = analyzer.describe_query(query_text)
    except QueryAnalysisError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = {
        "query": query_text,
        "columns": [column["name"] for column in details],
    }
    if mode == MODE_DETAILED:
        result["details"] = details
    return result


@app.post("/api/query/columns/batch")
async def query_columns_batch(request: Dict = Body(...)):
    """Predict column names for several independent queries"""
    queries = request.get("queries")
    if not isinstance(queries, list):
        raise HTTPException(status_code=400, detail="Queries must be a list of strings")

    results = []
    for query_text in queries:
        try:
            results.append({"query": query_text, "columns": analyzer.analyze_query(query_text)})
        except QueryAnalysisError as e:
            results.append({"query": query_text, "error": str(e)})

    return {
        "status": "success",
        "query_count": len(queries),
        "failed_count": sum(1 for result in results if "error" in result),
        "results": results,
    }


@app.post("/api/upload/csv")
async def upload_csv(
    file: UploadFile = File(...),
    query: str = Query(..., description="SELECT query that produced the CSV"),
    has_header: bool = Query(False, description="Whether the first CSV row is a header"),
):
    """Upload a query result export and label or check its columns"""
    try:
        content = await file.read()
        df = column_mapper.read_csv(content, has_header=has_header)
        table_name = (file.filename or "result").replace('.csv', '').replace('.CSV', '')

        if has_header:
            predicted = analyzer.analyze_query(query)
            comparison = column_mapper.compare_columns(predicted, list(df.columns))
            return {
                "status": "success",
                "predicted_columns": predicted,
                "comparison": comparison,
                "table": column_mapper.frame_to_table_dict(df, table_name),
            }

        labeled = column_mapper.label_frame(df, query)
        return {
            "status": "success",
            "predicted_columns": list(labeled.columns),
            "table": column_mapper.frame_to_table_dict(labeled, table_name),
        }
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
