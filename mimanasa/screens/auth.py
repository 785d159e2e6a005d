"""Logged-out views: splash, login, registration and the forgot-password steps."""

from typing import Dict, Type

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from mimanasa.controller import AppController, AuthScreen
from mimanasa.recovery import AwaitingOTP
from mimanasa.screens.base import choose, render_menu, show_result


class SplashView:
    def __init__(self, console: Console, app_name: str, version: str) -> None:
        self.console = console
        self.app_name = app_name
        self.version = version

    def show(self) -> None:
        self.console.print(Panel(
            Align.center(f"[bold cyan]📚 {self.app_name}[/]\n[dim]Books · Poems · Reviews[/]\n[dim]v{self.version}[/]"),
            border_style="cyan",
            padding=(1, 4),
        ))


class AuthView:
    def __init__(self, controller: AppController, console: Console) -> None:
        self.controller = controller
        self.console = console

    async def show(self) -> bool:
        raise NotImplementedError


class LoginView(AuthView):
    MENU = [
        ("1", "Sign in", "🔑"),
        ("2", "Create an account", "📝"),
        ("3", "Forgot password?", "🔐"),
        ("0", "Quit", "🚪"),
    ]

    async def show(self) -> bool:
        render_menu(self.console, "Welcome Back", self.MENU, subtitle="Sign in to continue reading")
        choice = choose(self.console, self.MENU, default="1")
        if choice == "0":
            return False
        if choice == "2":
            self.controller.show_register()
        elif choice == "3":
            self.controller.forgot_password()
        else:
            email = Prompt.ask("✉️  Email address", console=self.console).strip()
            password = Prompt.ask("🔒 Password", password=True, console=self.console)
            with self.console.status("[bold green]Signing in..."):
                result = await self.controller.login(email, password)
            show_result(self.console, result)
        return True


class RegisterView(AuthView):
    MENU = [
        ("1", "Register", "📝"),
        ("2", "I already have an account", "🔑"),
        ("0", "Quit", "🚪"),
    ]

    async def show(self) -> bool:
        render_menu(self.console, "Create Account", self.MENU, subtitle="Join the library")
        choice = choose(self.console, self.MENU, default="1")
        if choice == "0":
            return False
        if choice == "2":
            self.controller.show_login()
            return True

        email = Prompt.ask("✉️  Email address", console=self.console).strip()
        username = Prompt.ask("👤 Username", console=self.console).strip()
        password = Prompt.ask("🔒 Password", password=True, console=self.console)
        with self.console.status("[bold green]Creating your account..."):
            result = await self.controller.register(email, username, password)
        show_result(self.console, result)
        return True


class ForgotPasswordView(AuthView):
    async def show(self) -> bool:
        self.console.print(Panel.fit(
            "Enter the email linked to your account and we'll send you a one-time code.",
            title="🔐 Forgot Password?",
            border_style="yellow",
        ))
        email = Prompt.ask("✉️  Email address (blank to go back)", default="", console=self.console).strip()
        if not email:
            self.controller.back_to_login()
            return True
        with self.console.status("[bold green]Sending OTP..."):
            result = await self.controller.send_otp(email)
        show_result(self.console, result)
        return True


class VerifyOTPView(AuthView):
    MENU = [
        ("1", "Enter code", "🔢"),
        ("2", "Resend code", "🔁"),
        ("3", "Back to login", "←"),
    ]

    async def show(self) -> bool:
        state = self.controller.recovery.state
        email = state.email if isinstance(state, AwaitingOTP) else ""
        render_menu(self.console, "📧 Verify OTP", self.MENU, subtitle=f"Code sent to {email}")
        choice = choose(self.console, self.MENU, default="1")
        if choice == "3":
            self.controller.back_to_login()
        elif choice == "2":
            show_result(self.console, await self.controller.resend_otp())
        else:
            length = self.controller.config.otp_length
            otp = Prompt.ask(f"🔢 {length}-digit code", console=self.console).strip()
            with self.console.status("[bold green]Verifying..."):
                result = await self.controller.verify_otp(otp)
            show_result(self.console, result)
        return True


class ResetPasswordView(AuthView):
    async def show(self) -> bool:
        self.console.print(Panel.fit(
            "Choose a new password for your account.",
            title="🔑 Reset Password",
            border_style="green",
        ))
        new_password = Prompt.ask(
            "🔒 New password (blank to go back)", password=True, default="", console=self.console
        )
        if not new_password:
            self.controller.back_to_login()
            return True
        confirm = Prompt.ask("🔒 Confirm password", password=True, console=self.console)
        with self.console.status("[bold green]Resetting password..."):
            result = await self.controller.reset_password(new_password, confirm)
        show_result(self.console, result)
        return True


AUTH_VIEWS: Dict[AuthScreen, Type[AuthView]] = {
    AuthScreen.LOGIN: LoginView,
    AuthScreen.REGISTER: RegisterView,
    AuthScreen.FORGOT_PASSWORD: ForgotPasswordView,
    AuthScreen.VERIFY_OTP: VerifyOTPView,
    AuthScreen.RESET_PASSWORD: ResetPasswordView,
}
