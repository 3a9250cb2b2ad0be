# sms_adapter.py
from __future__ import annotations
import os, importlib, logging
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from dotenv import load_dotenv
from twilio.twiml.messaging_response import MessagingResponse

from trivia.models import ChatIn, ChatOut
from trivia.sms_bridge_handler import general_error

# ------------------------------------------------------------------------------
# Config
# ------------------------------------------------------------------------------
load_dotenv(override=False)

TRIVIA_HANDLER_PATH = os.getenv("TRIVIA_HANDLER", "trivia.sms_bridge_handler:handle_message")

# ------------------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------------------
logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s: %(message)s")
log = logging.getLogger("sms_adapter")

# ------------------------------------------------------------------------------
# Import dinámico del handler (mod:func)
# ------------------------------------------------------------------------------
def _import_handler(path: str) -> Callable[[str, str], str]:
    if ":" not in path:
        raise RuntimeError("TRIVIA_HANDLER debe ser 'modulo.submodulo:funcion'")
    module_name, func_name = path.split(":", 1)
    mod = importlib.import_module(module_name)
    fn = getattr(mod, func_name)
    if not callable(fn):
        raise RuntimeError("TRIVIA_HANDLER no es invocable")
    return fn

handle_message = _import_handler(TRIVIA_HANDLER_PATH)

def run_turn(user_id: str, text: str) -> str:
    """Siempre devuelve UN texto: la respuesta del quiz o el error genérico."""
    try:
        return handle_message(user_id, text)
    except Exception as e:
        log.exception("Error en handle_message: %s", e)
        return general_error()

# ------------------------------------------------------------------------------
# TwiML
# ------------------------------------------------------------------------------
def render_twiml(message: str) -> str:
    resp = MessagingResponse()
    resp.message(message or "")
    return str(resp)

# ------------------------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------------------------
app = FastAPI(title="Trivia SMS Adapter", version="1.0.0")

@app.get("/health")
def health():
    return PlainTextResponse("ok")

# Webhook de SMS entrante (form-encoded: From, Body)
@app.post("/sms")
@app.post("/twilio/sms")
async def sms_webhook(request: Request):
    form = await request.form()
    user_id = str(form.get("From") or "")
    text = str(form.get("Body") or "")
    log.info("Mensaje de %s: %s", user_id, text)

    # handler sync (store + export bloqueantes) → threadpool
    reply = await run_in_threadpool(run_turn, user_id, text)
    return Response(content=render_twiml(reply), media_type="application/xml")

# JSON (tools/cli_chat.py --json)
@app.post("/chat", response_model=ChatOut)
def chat(body: ChatIn):
    reply = run_turn(body.session, body.text)
    return ChatOut(reply=reply, trace={"session": body.session})

# Entrypoint
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
