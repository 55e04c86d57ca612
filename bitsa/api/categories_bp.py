from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from bitsa import db
from bitsa.models.category import Category
from bitsa.schemas import category_schema, categories_schema
from bitsa.utils.auth_helpers import require_admin
from bitsa.utils.slug_utils import generate_unique_slug

categories_bp = Blueprint('categories', __name__, url_prefix='/api/categories')


@categories_bp.route('/', methods=['GET'])
def get_categories():
    categories = Category.query.order_by(Category.name.asc()).all()
    return jsonify({'success': True, 'categories': categories_schema.dump(categories)}), 200


@categories_bp.route('/', methods=['POST'])
@jwt_required()
@require_admin
def create_category():
    try:
        data = category_schema.load(request.get_json() or {})

        category = Category()
        category.name = data['name'].strip()
        category.slug = generate_unique_slug(
            db.session, Category, category.name, fallback='category'
        )
        category.description = data.get('description')
        db.session.add(category)
        db.session.commit()

        return jsonify({'success': True, 'message': 'Category created successfully',
                        'category': category_schema.dump(category)}), 201

    except ValidationError as e:
        return jsonify({'success': False, 'message': 'Invalid data', 'errors': e.messages}), 400
    except IntegrityError:
        db.session.rollback()
        return jsonify({'success': False, 'message': 'Category already exists'}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Error creating category')
        return jsonify({'success': False,
                        'message': 'An error occurred while creating the category'}), 500
