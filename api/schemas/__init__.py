from .ask import AskRequest, AskResponse
