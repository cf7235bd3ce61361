"""
初始化管理员账号
创建默认的超级管理员账号用于首次登录后台
"""
import asyncio
import os

from catalogue_admin.infrastructure.database import dispose_engine, get_session, init_db
from catalogue_admin.modules.accounts import AccountCreateInput, AccountService


async def create_default_admin() -> None:
    """创建默认管理员账号"""
    await init_db()

    username = os.environ.get("ADMIN_USERNAME", "admin")
    password = os.environ.get("ADMIN_PASSWORD", "admin123")
    email = os.environ.get("ADMIN_EMAIL", "admin@example.com")

    async for db in get_session():
        service = AccountService.with_session(db)
        if await service.get_by_username(username) is not None:
            print("管理员账号已存在,无需初始化")
            continue

        await service.create_account(
            AccountCreateInput(
                username=username,
                password=password,
                name="Administrator",
                role="super_admin",
                email=email,
                is_active=True,
            )
        )

        print("=" * 50)
        print("默认管理员账号创建成功!")
        print("=" * 50)
        print(f"用户名: {username}")
        print(f"密码: {password}")
        print("=" * 50)
        print("请登录后立即修改密码!")
        print("=" * 50)

    await dispose_engine()


def main() -> None:
    asyncio.run(create_default_admin())


if __name__ == "__main__":
    main()
