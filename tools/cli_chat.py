import argparse
import xml.etree.ElementTree as ET

import requests

BASE = "http://127.0.0.1:8000"

def twiml_text(xml: str) -> str:
    """Texto de los <Message> de una respuesta TwiML."""
    root = ET.fromstring(xml)
    return "\n".join((m.text or "") for m in root.iter("Message"))

def send(base: str, sender: str, text: str, use_json: bool = False) -> str:
    if use_json:
        r = requests.post(f"{base}/chat", json={"session": sender, "text": text}, timeout=60)
        r.raise_for_status()
        return r.json().get("reply", "")
    # mismo camino que Twilio: form From/Body → TwiML
    r = requests.post(f"{base}/sms", data={"From": sender, "Body": text}, timeout=60)
    r.raise_for_status()
    return twiml_text(r.text)

def main():
    parser = argparse.ArgumentParser(description="Simula SMS contra el webhook del quiz")
    parser.add_argument("--from", dest="sender", default="+15550000000")
    parser.add_argument("--base", default=BASE)
    parser.add_argument("--json", action="store_true", help="usar /chat en vez de /sms")
    args = parser.parse_args()

    print("Trivia CLI — escribí y Enter (salir con :q)")
    while True:
        msg = input("> ").strip()
        if msg == ":q":
            break
        try:
            print(send(args.base, args.sender, msg, args.json))
        except (requests.RequestException, ET.ParseError, ValueError) as e:
            print(f"[error] {e}")

    print("Chau!")

if __name__ == "__main__":
    main()
