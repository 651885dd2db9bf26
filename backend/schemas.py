# backend/schemas.py - shapes of data going out of the stats API (validation layer)
from pydantic import BaseModel

class SizeOut(BaseModel):
    w: int
    h: int

class TopSizeOut(SizeOut):
    n: int                  # times this size was requested

class TopReferrerOut(BaseModel):
    ref: str
    n: int

class HitBucketOut(BaseModel):
    title: str              # "5s", "10s", ...
    count: int
