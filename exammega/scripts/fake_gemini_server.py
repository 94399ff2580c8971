"""
Fake Gemini server for running the scanner without network access or a key.

Simulates POST /v1beta/models/<model>:generateContent on port 9100.
Each call sleeps briefly (simulating model latency) and answers with a
fenced JSON reply, the way the real model often does.

Usage:
    python exammega/scripts/fake_gemini_server.py
    GEMINI_BASE_URL=http://localhost:9100 GEMINI_API_KEY=fake \
        python -m exammega.services.api
"""

import json
import os
import random
import time
import uvicorn
from fastapi import FastAPI, Request

app = FastAPI(title="fake-gemini-server")

DELAY_S = float(os.getenv("FAKE_GEMINI_DELAY_S", "1.5"))
# share of calls that "see" a question; 1.0 makes every scan answer
FOUND_RATE = float(os.getenv("FAKE_GEMINI_FOUND_RATE", "0.8"))
# numeric labels exercise the client's 1-5 → A-E mapping
ANSWERS = ["A", "B", "C", "D", "E", "1", "2", "3", "4", "5"]


def _reply(found: bool) -> dict:
    if found:
        body = {"found": True, "answer": random.choice(ANSWERS), "explanation": "Fake server picked this at random."}
    else:
        body = {"found": False}
    text = "```json\n" + json.dumps(body) + "\n```"
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


@app.post("/v1beta/models/{model_call}")
async def generate_content(model_call: str, request: Request):
    body = await request.json()
    parts = body["contents"][0]["parts"]
    image = next((p["inline_data"] for p in parts if "inline_data" in p), None)
    size_kb = len(image["data"]) * 3 // 4 // 1024 if image else 0
    print(f"[gemini] {model_call} key={request.headers.get('x-goog-api-key', '')[:4]}… image={size_kb}KB — thinking {DELAY_S:.1f}s ...")
    time.sleep(DELAY_S)
    found = random.random() < FOUND_RATE
    print(f"[gemini] done found={found}")
    return _reply(found)


if __name__ == "__main__":
    print("Fake Gemini server starting on http://localhost:9100")
    uvicorn.run(app, host="0.0.0.0", port=9100)
