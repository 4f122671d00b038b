from fastapi import APIRouter

router = APIRouter()


@router.get("/", status_code=202)
def hello_from_app():
    return {"Test": "Hello From App"}
