from .user import User
from .chat import Chat, CHAT_TYPE_PRIVATE, CHAT_TYPE_GROUP, CHAT_TYPE_SUPERGROUP, CHAT_TYPE_CHANNEL
from .message_entity import MessageEntity, BOT_COMMAND
from .photo_size import PhotoSize
from .message import Message
from .callback_query import CallbackQuery
from .inline_query import InlineQuery
from .inline_keyboard import InlineKeyboardButton, InlineKeyboardMarkup
from .input_file import InputFile, InputFileString, InputFileUpload
from .response import ResponseEnvelope, ResponseParameters
from .update import Update, UpdateKind
from .webhook_info import WebhookInfo
