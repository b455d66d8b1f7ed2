"""
Script para crear el primer usuario staff (manager/admin) del portal
Ejecutar: python create_manager.py
"""
import sys

from database.conexion import SessionLocal, engine, Base
import models  # registra todos los modelos
from models.usuario import User, RolUsuario, ROLES_STAFF
from utils.auth import get_password_hash


def crear_staff():
    """Crea un usuario con rol manager o admin"""
    db = SessionLocal()

    try:
        print("\n🔧 Creación de Usuario Staff")
        print("=" * 50)

        email = input("Email (default: manager@travel.local): ").strip().lower() or "manager@travel.local"

        existente = db.query(User).filter(User.email == email).first()
        if existente:
            print(f"⚠️  Ya existe el usuario '{email}'")
            print(f"   ID: {existente.id}")
            print(f"   Rol: {existente.role}")
            return

        while True:
            password = input("Password (mínimo 8 caracteres): ").strip()
            if len(password) >= 8:
                break
            print("❌ La contraseña debe tener al menos 8 caracteres")

        rol = input("Rol (manager/admin, default: manager): ").strip().lower() or RolUsuario.MANAGER.value
        if rol not in ROLES_STAFF:
            print(f"❌ Rol inválido: {rol}")
            sys.exit(1)

        nombre = input("Nombre (opcional): ").strip() or "매니저"

        nuevo = User(
            email=email,
            hashed_password=get_password_hash(password),
            name=nombre,
            role=rol,
            status="active",
        )
        db.add(nuevo)
        db.commit()
        db.refresh(nuevo)

        print("\n✅ Usuario staff creado exitosamente!")
        print(f"   ID: {nuevo.id}")
        print(f"   Email: {nuevo.email}")
        print(f"   Rol: {nuevo.role}")
        print("\n🔐 Puede iniciar sesión con estas credenciales en /auth/login")

    except Exception as e:
        db.rollback()
        print(f"\n❌ Error al crear usuario staff: {str(e)}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    print("🚢 Portal de Cotizaciones - Inicialización de Staff")
    print("=" * 50)

    print("\n📊 Verificando tablas de base de datos...")
    Base.metadata.create_all(bind=engine)
    print("✅ Tablas verificadas/creadas")

    crear_staff()

    print("\n🎉 Proceso completado!")
    print("\n📖 Próximos pasos:")
    print("   1. Inicie el servidor: uvicorn main:app --reload")
    print("   2. Acceda a la documentación: http://localhost:8000/docs")
    print("   3. Use /auth/login para obtener tokens JWT")
