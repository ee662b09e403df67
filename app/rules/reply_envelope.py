"""TwiML reply envelope for synchronous Twilio webhook replies"""
from twilio.twiml.messaging_response import MessagingResponse

TWIML_MEDIA_TYPE = "application/xml"


def build_reply_envelope(message: str) -> str:
    """
    Wrap a reply in a TwiML <Response><Message> document.

    The Twilio helper serializes through ElementTree, so reserved XML
    characters in the message are escaped.
    """
    response = MessagingResponse()
    response.message(message)
    return response.to_xml(xml_declaration=True)
