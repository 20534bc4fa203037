from abc import ABC, abstractmethod


class AbstractCaptchaVerifier(ABC):
	"""Interface for services that tell humans from bots."""

	@abstractmethod
	async def verify(self, token: str, *, remote_ip: str | None = None) -> bool:
		"""Check a client-side captcha token.

		Args:
			token: Token produced by the captcha widget in the browser.
			remote_ip: Optional end-user IP forwarded to the provider.

		Returns:
			bool: True when the provider considers the client human.
		"""
		...
